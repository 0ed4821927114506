"""Package setup for livebox_client."""

from setuptools import setup, find_packages

setup(
    name="livebox-client",
    version="1.0.0",
    description="Client for the JSON API of Livebox home routers",
    packages=find_packages(include=["livebox_client", "livebox_client.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "urllib3>=2.0.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "livebox-client=livebox_client.cli:main",
        ],
    },
)
