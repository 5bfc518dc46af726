#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

from os import path
from setuptools import setup, find_packages


here = path.abspath(path.dirname(__file__))
with open(path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='benchjunit',
    version='0.1',
    description='Runs go benchmarks and translates their output to JUnit XML',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='BSD',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: BSD License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Software Development :: Testing',
        'Topic :: Utilities',
        'Intended Audience :: Developers',
    ],
    keywords='benchmark go junit testgrid',
    python_requires='>=3.8',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=['click', 'pyyaml'],
    extras_require={
        'test': ['pytest', 'coverage', 'pyfakefs'],
    },
    entry_points={
        'console_scripts': ['benchjunit=benchjunit.cli:main'],
    },
    scripts=['benchjunit_cli.py'],
)
