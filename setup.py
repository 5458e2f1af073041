from setuptools import setup, find_packages

setup(
    name="ratrecon",
    version="1.0",
    description="Exact rational reconstruction from approximations with known denominator",
    long_description=("Reconstruction of exact rationals, and of rational vectors over one common denominator, "
                      "from approximations n/d with a denominator bound, as used in symbolic-numeric exact "
                      "linear system solvers"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=["python-flint", "numpy", "sympy"],
    extras_require={"tests": ["pytest"]},
    classifiers=[
        "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha", "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10", "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Mathematics"
    ],
    keywords=["rational reconstruction", "continued fractions", "exact linear algebra", "symbolic-numeric"],
    zip_safe=False,
)
