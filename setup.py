from setuptools import setup, find_packages
setup(
    name="qr-attribute-service",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app"],
    install_requires=[
        "numpy", "zstandard", "xxhash",
        "flask", "flask-cors", "pymongo",
        "qrcode<7.4", "pillow",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["qr-service=app:main"]},
    python_requires=">=3.9",
)
