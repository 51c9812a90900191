from setuptools import setup, find_packages
import re

with open('alignpy/__version.py') as version_file:
    __version__ = re.search(r"__version__ = '([^']+)'", version_file.read()).group(1)

with open('README.md') as readme:
    setup(
        name='alignpy',
        version=__version__,
        packages=find_packages(exclude=('tests', 'tests.*')),
        long_description=readme.read(),
        long_description_content_type='text/markdown',
        license='MIT',
        description='Python library decoding BAM alignment records into structured records with filtering and downsampling',
        python_requires='>=3.6',
        install_requires=['numba', 'numpy'],
        extras_require={'test': ['pytest']},
        include_package_data=True
    )
