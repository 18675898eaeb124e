from setuptools import setup, find_packages

setup(
    name="pepstash",
    version="0.1.0",
    packages=find_packages(include=["pepstash", "pepstash.*"]),
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "pepstash=pepstash.cli:main",
        ],
    },
    install_requires=[
        "pysam",
        "biopython",
        "pyyaml",
        "pandas",
    ],
    extras_require={
        "parquet": ["pyarrow"],
        "test": ["pytest"],
    },
)
