from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="charme_annotator",
    version=Path("./charme_annotator/VERSION").read_text().strip(),
    description="Geo-referenced commenting on datasets for CHARMe nodes",
    packages=find_packages(include=["charme_annotator", "charme_annotator.*"]),
    package_data={"charme_annotator": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "requests",
        "shapely>=2.0",
        "easydict",
    ],
    extras_require={
        "leaflet": ["ipyleaflet>=0.17", "ipywidgets"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["charme_annotator = charme_annotator.cli:main"],
    },
)
