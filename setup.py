from setuptools import setup, find_namespace_packages

setup(
    name="dipod",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["dipod", "dipod.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
        "flask>=2.3",
        "werkzeug>=2.3",
        "varlink>=30.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dipod=dipod.CLI.main:main",
        ],
    },
)
