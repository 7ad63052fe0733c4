"""
rostersync - Roster spreadsheet to static site pages

Installation:
    pip install -e .

This installs the 'rostersync' command globally in your environment.
"""

from setuptools import setup, find_packages
import os

# Read README for long description
long_description = ''
if os.path.exists('README.md'):
    with open('README.md', 'r', encoding='utf-8') as f:
        long_description = f.read()

setup(
    name='rostersync',
    version='1.0.0',
    description='Generate and publish student pages and teacher dashboards from a roster spreadsheet',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Dale Chapman',
    author_email='',
    license='MIT',

    packages=find_packages(exclude=['tests', 'tests.*', 'docs']),

    # Default page templates copied by `rostersync init`
    include_package_data=True,
    package_data={
        'rostersync': ['templates/*.html'],
    },

    python_requires='>=3.9',

    install_requires=[
        'click>=8.0',
        'PyYAML>=6.0',
        'requests>=2.28',
    ],

    extras_require={
        'dev': [
            'pytest>=7.4',
            'pytest-cov>=4.1',
            'pytest-mock>=3.11',
        ],
    },

    entry_points={
        'console_scripts': [
            'rostersync=rostersync.cli:cli',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Education',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Education',
    ],

    keywords='roster google-sheets static-site education git',
)
