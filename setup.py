from setuptools import setup
from pathlib import Path

setup(
    name='kubentity',
    version="0.1.0",
    description='Generic typed client for kubernetes style resource APIs',
    long_description=Path("README.md").read_text(),
    long_description_content_type="text/markdown",
    license='MIT',
    packages=['kubentity', 'kubentity.config', 'kubentity.core', 'kubentity.models', 'kubentity.resources'],
    package_data={'kubentity': ['py.typed']},
    install_requires=[
        'httpx >= 0.28.1, < 1.0.0',
        'PyYAML'
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "respx"
        ]
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13'
    ]
)
