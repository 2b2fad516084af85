from setuptools import setup, find_packages


setup(
    name="ustar",
    version="0.1",
    packages=find_packages(include=["ustar", "ustar.*"]),
    description="In-memory codec for USTAR tape archives: 512-byte headers, octal fields, checksums and block padding.",
    python_requires=">=3.9",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "ustar=ustar.cli:main",
        ]
    },
)
