"""Setup script for the civ_anim Python package."""

import os
from glob import glob
from setuptools import setup, find_packages

package_name = 'civ_anim'


def get_package_data():
    """Collect packaged config files."""
    config_dir = os.path.join(os.path.dirname(__file__), package_name, 'config')
    config_files = [
        os.path.relpath(path, os.path.join(os.path.dirname(__file__), package_name))
        for path in glob(os.path.join(config_dir, '*.yaml'))
    ]
    return {package_name: config_files}


setup(
    name=package_name,
    version='0.5.0',
    packages=find_packages(exclude=['test']),
    package_data=get_package_data(),
    install_requires=[
        'setuptools',
        'pyyaml>=6.0',
        'numpy>=1.21.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'black>=23.0.0',
            'isort>=5.12.0',
            'mypy>=1.0.0',
            'flake8>=6.0.0',
        ],
    },
    zip_safe=True,
    maintainer='civ_anim Team',
    maintainer_email='maintainer@example.com',
    description='civ_anim - decoder for compressed skeletal animation blobs',
    license='MIT',
    tests_require=['pytest'],
    python_requires='>=3.10',
)
