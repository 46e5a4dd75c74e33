from setuptools import setup, find_packages
import re
from pathlib import Path

_version_re = re.compile(r"^__version__\s*(?::\s*[^=]+)?\s*=\s*['\"]([^'\"]+)['\"]", re.M)


def file_getVersion(rel_path: str) -> str:
    """
    Retrieve the version string from the specified file.
    """
    version_file = Path(rel_path)
    if not version_file.exists():
        raise RuntimeError(f"Version file {rel_path} not found.")

    with open(version_file, 'r') as f:
        content = f.read()
        match = _version_re.search(content)
        if not match:
            raise RuntimeError(f"Could not find __version__ in {rel_path}")
        return match.group(1)


setup(
    name='splice',
    version=file_getVersion('splice/splice.py'),
    description='Streaming include processor: replace placeholders with file contents',
    author='FNNDSC',
    author_email='rudolph.pienaar@childrens.harvard.edu',
    url='https://github.com/FNNDSC/splice',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.11',
    install_requires=[
        'pydantic>=2.0',
        'pydantic-settings>=2.2',
        'loguru',
        'rich',
        'click>=8.0',
        'appdirs',
    ],
    license='MIT',
    entry_points={
        'console_scripts': [
            'splice = splice.splice:main'  # Matches splice/splice.py
        ]
    },
    classifiers=[
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Text Processing :: Filters',
    ],
    extras_require={
        'none': [],
        'dev': [
            'pytest>=7.1',
            'pytest-asyncio>=0.24',
        ]
    }
)
