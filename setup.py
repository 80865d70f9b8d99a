# -*- coding: utf-8 -*-
import codecs
from setuptools import setup, find_packages


tests_require = [
    'pytest>=6.0',
]

setup(
    name='Flask-Record',
    version='0.3.0',
    packages=find_packages(exclude=['*tests*']),
    license='MIT',
    description='Active record models for consuming REST APIs from Python and Flask',
    long_description=codecs.open('README.rst', encoding='utf-8').read(),
    tests_require=tests_require,
    python_requires='>=3.6',
    install_requires=[
        'Flask>=1.0',
        'requests>=2.20',
        'jsonschema>=2.4.0',
        'aniso8601>=0.84',
        'blinker>=1.3',
    ],
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Software Development :: Libraries :: Python Modules'
    ],
    zip_safe=False,
    extras_require={
        'tests': tests_require,
    }
)
