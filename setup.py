"""Setup file for project"""


from setuptools import setup, find_packages

with open("README.md", 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name                            = "wqp-pull",
    version                         = "0.1.0",
    description                     = "Water Quality Portal inventory and pull partitioning",
    long_description                = long_description,
    long_description_content_type   = "text/markdown",
    packages                        = find_packages(include=["src", "src.*"]),
    py_modules                      = ["wqp_pull"],
    install_requires                = [
        "pandas>=2.0",
        "numpy",
        "pyarrow",
        "requests",
        "urllib3",
        "python-dotenv",
        "colorama",
        "PyYAML",
    ],
    extras_require                  = {
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",           # logging.getLevelNamesMapping
)
