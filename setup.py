from setuptools import setup, find_packages
import os

# Read version from __init__.py
def get_version():
    """Get version from imgproc/__init__.py"""
    init_file = os.path.join(os.path.dirname(__file__), "imgproc", "__init__.py")
    with open(init_file, "r") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"\'')
    raise RuntimeError("Unable to find version string.")

# Installation Examples:
# - Base package only: pip install imgproc
# - With test tooling: pip install "imgproc[dev]"

extras_require = {
    # Development dependencies
    "dev": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "coverage>=7.3.2",
    ],
}

setup(
    name="imgproc",
    version=get_version(),
    description="2D raster image processing: filters, colour spaces, tone, transforms and morphology",
    long_description=open("README.md", "r", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Image Processing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    keywords="image-processing, filters, colour-space, morphology, computer-vision",
    packages=find_packages(include=["imgproc", "imgproc.*"]),
    install_requires=[
        # Core numerics
        "numpy>=1.26.4",
        "scipy>=1.12.0",  # SVD for the kernel separability test

        # Image I/O and formats
        "imageio>=2.37.0",  # PNG and JPEG
        "tifffile>=2025.6.11",  # TIFF

        # Configuration
        "PyYAML>=6.0.2",
    ],
    extras_require=extras_require,

    # Console script entry points
    entry_points={
        "console_scripts": [
            "imgproc=imgproc.cli:main",
        ],
    },
)
