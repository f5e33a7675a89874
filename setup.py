#!/usr/bin/env python3
# *****************************************************************************
# virtual device simulator
#
# This program is free software; you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation; either version 2 of the License, or (at your option) any later
# version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
# details.
#
# You should have received a copy of the GNU General Public License along with
# this program; if not, write to the Free Software Foundation, Inc.,
# 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA
#
# Module authors:
#   Georg Brandl <g.brandl@fz-juelich.de>
#
# *****************************************************************************


from pathlib import Path

from setuptools import find_packages, setup

import vdsim.version

scripts = [str(script) for script in Path('bin').glob('vd')]


setup(
    name='vdsim',
    version=vdsim.version.get_version(),
    license='GPL',
    author='Markus Zolliker',
    author_email='markus.zolliker@psi.ch',
    description='virtual device simulator for instruments with text protocols',
    packages=find_packages(exclude=['test']),
    package_data={'vdsim': ['RELEASE-VERSION']},
    python_requires='>=3.11',
    install_requires=[
        "mlzlog",
        "psutil",
        "python-daemon",
    ],
    extras_require={
        'test': ['pytest'],
    },
    scripts=scripts,
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Natural Language :: English',
        'License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Topic :: Scientific/Engineering',
        'Topic :: Software Development :: Testing',
    ],
)
