"""Setup configuration for Azure PIM Tool package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="azure-pim-tool",
    version="0.1.0",
    description="A small CLI to list and self-activate eligible Azure PIM roles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Topic :: System :: Systems Administration",
        "Development Status :: 3 - Alpha",
    ],
    python_requires=">=3.9",
    install_requires=[
        "azure-identity>=1.14.0",
        "azure-core>=1.29.0",
        "azure-mgmt-authorization>=4.0.0",
        "azure-mgmt-subscription>=3.1.0",
        "click>=8.1.7",
        "python-dotenv>=1.0.0",
        "pydantic>=2.4.2",
        "rich>=13.7.0",
        "PyJWT>=2.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "azure-pim-tool=azure_pim_tool.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
