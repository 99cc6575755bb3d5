from setuptools import setup, find_packages

setup(
  name='hostpool',
  version='0.1.0',
  description='Initial node-pool allocation for distributed job launchers',
  packages=find_packages(exclude=['tests', 'tests.*']),
  python_requires='>=3.11',
  install_requires=[
    'pandas', 'click', 'rich'
  ],
  extras_require={
    'ray': ['ray'],
    'test': ['pytest'],
  },
  entry_points={
    'console_scripts': ['hostpool=hostpool.cli:main'],
  },
)
