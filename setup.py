from setuptools import setup, find_packages

setup(
    name="errkit",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp",
        "tqdm"
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    python_requires=">=3.8",
    description="Structured errors and async control-flow combinators: retry, timeout, cancellation, rate limiting and batching.",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    author="Ludwig",
    author_email="yuzeliu@gmail.com",
    url=None,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
