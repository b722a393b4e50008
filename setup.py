"""
Setup file for the Mock Interviewer package.
"""
from setuptools import setup, find_packages

setup(
    name="mock_interviewer",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.5.2",
        "motor>=3.3.0",
        "pymongo>=4.6.0",
        "langchain-core>=0.2.0",
        "langchain-google-genai>=1.0.0",
        "python-dotenv>=1.0.0",
        "httpx>=0.25.0",
        "slowapi>=0.1.9",
        "click>=8.1.0",
        "apscheduler>=3.10.0,<4",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mock-interviewer=mock_interviewer.cli:cli",
        ],
    },
    python_requires=">=3.9",
    author="Mock Interviewer Team",
    author_email="your.email@example.com",
    description="Voice-driven mock interviews with AI-generated questions and feedback",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
