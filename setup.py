import setuptools

setuptools.setup(
    name="storage-distribution",
    version="0.1.0",
    description=(
        "Resolves cloud agnostic storage capacity requirements into provider "
        "drive layouts using a decision matrix"
    ),
    python_requires=">=3.10",
    packages=setuptools.find_packages(exclude=("tests*",)),
    install_requires=[
        "pydantic>2.0",
    ],
    extras_require={
        "aws": ["boto3"],
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    entry_points={
        "console_scripts": [
            "resolve-distribution = "
            "storage_distribution.tools.resolve_distribution:main",
        ]
    },
    include_package_data=True,
    package_data={
        "": [
            "matrices/profiles/*.json",
        ]
    },
)
