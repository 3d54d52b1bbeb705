from setuptools import find_packages, setup

setup(
  name = 'keyhound',
  packages = find_packages('src'),
  package_dir = {'': 'src'},
  version = '1.0.0',
  license='GNU',
  description = 'command line tool that finds live AWS access keys in the history of a git repository',
  keywords = ['aws', 'iam', 'git', 'secrets', 'credentials'],
  python_requires='>=3.11',
  install_requires=[
"boto3>=1.28",
"botocore>=1.31",
"pydantic>=2.0",
"pydantic-settings>=2.0",
"PyYAML>=6.0",
"rich>=13.0",
"typer>=0.9",
      ],
  extras_require={
    'test': [
"pytest>=7.0",
"pytest-asyncio>=0.21",
    ],
  },
  entry_points={
    'console_scripts': [
      'keyhound=keyhound.cli.main:run_cli',
    ],
  },
  classifiers=[
    'Development Status :: 4 - Beta',
    'Intended Audience :: Information Technology',
    'Topic :: Security',
    'License :: OSI Approved :: GNU General Public License (GPL)',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
  ],
)
