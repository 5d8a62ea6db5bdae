from setuptools import find_packages, setup

with open("README.rst") as f:
    long_description = f.read()

setup(
    name="spatialcorr",
    version="0.1.0",
    description="Global Moran's I with seeded Monte Carlo significance tests",
    long_description=long_description,
    license="MIT",
    packages=find_packages(include=["spatialcorr", "spatialcorr.*"]),
    package_dir={"spatialcorr": "spatialcorr"},
    test_suite="spatialcorr.tests",
    python_requires=">=3.10",
    install_requires=[
        "geopandas",
        "joblib",
        "loguru",
        "matplotlib",
        "numba",
        "numpy>=1.25",
        "pandas",
        "scipy",
        "shapely>=2",
    ],
    extras_require={
        "dev": [
            "black",
            "pytest",
            "pytest-cov",
        ],
    },
    classifiers=[
        # https://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: GIS",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
    keywords="spatial autocorrelation moran geopandas",
)
