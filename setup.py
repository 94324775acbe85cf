from setuptools import find_packages, setup

setup(
    name="orderdesk",
    version="0.1.0",
    description="Order lifecycle and notification backend",
    packages=find_packages(include=["orderdesk", "orderdesk.*"]),
    python_requires=">=3.10",
    install_requires=[
        "SQLAlchemy>=2.0",
        "click>=8.0",
        "python-dotenv>=1.0"
    ],
    extras_require={"dev": ["pytest"]},
    entry_points={
        "console_scripts": [
            "orderdesk=orderdesk.cli.main:cli",
        ],
    },
)
