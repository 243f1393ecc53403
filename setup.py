"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/jpsbuild/jpsbuild"
KEYWORDS = "build incremental compiler classpath jdk sdk kotlin java modules"
HERE = os.path.dirname(os.path.abspath(__file__))



if __name__ == "__main__":
    setup(
        name="jpsbuild",
        version="0.1.0",
        description="Incremental multi-module builds and runtime classpath resolution",
        keywords=KEYWORDS,
        url=URL,
        package_dir={"": "src"},
        packages=find_packages(where="src", include=["jpsbuild", "jpsbuild.*"]),
        python_requires=">=3.9",
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["jpsbuild=jpsbuild.cli:main"]},
        include_package_data=True)
