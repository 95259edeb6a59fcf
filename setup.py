import codecs
import os
import re

from setuptools import find_packages, setup


def read_file(filename, encoding='utf8'):
    """Read unicode from given file."""
    with codecs.open(filename, encoding=encoding) as fd:
        return fd.read()


here = os.path.abspath(os.path.dirname(__file__))

# read version number (and other metadata) from package init
init_fn = os.path.join(here, 'le_route53', '__init__.py')
meta = dict(re.findall(r"""__([a-z]+)__ = '([^']+)""", read_file(init_fn)))

readme = read_file(os.path.join(here, 'README.rst'))
version = meta['version']

install_requires = [
    'acme>=2.0.0',
    'boto3',
    'botocore',
    'ConfigArgParse>=1.5.3',
    'configobj>=5.0.6',
    'cryptography>=3.2.1',
    'josepy>=1.13.0',
    'requests>=2.20.0',
    'setuptools',
]

test_extras = [
    'coverage',
    'pytest',
    'pytest-cov',
]

dev_extras = [
    'mypy',
    'pylint',
    'tox',
    'wheel',
]

setup(
    name='le-route53',
    version=version,
    description="Let's Encrypt certificate renewal using Route53 DNS-01 challenges",
    long_description=readme,
    license='Apache License 2.0',
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: Name Service (DNS)',
        'Topic :: Security',
        'Topic :: System :: Systems Administration',
        'Topic :: Utilities',
    ],

    packages=find_packages(exclude=['docs', 'examples']),
    include_package_data=True,
    package_data={'le_route53.tests': ['testdata/*']},

    install_requires=install_requires,
    extras_require={
        'dev': dev_extras,
        'test': test_extras,
    },

    entry_points={
        'console_scripts': [
            'le-route53 = le_route53.main:main',
        ],
    },
)
