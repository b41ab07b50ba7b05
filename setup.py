from setuptools import setup, find_packages

# Minimal setup.py for editable installs (pip install -e .)
setup(
    name="infbench",
    version="0.1.0",
    description="Latency benchmarking harness for compiled inference artifacts",
    packages=find_packages(exclude=("tests", "experiments", "configs", "docs")),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "torch>=2.5",
        "onnxruntime>=1.17",
        "onnx>=1.15",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
