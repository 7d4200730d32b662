import io
import os

from setuptools import setup, find_packages

DESCRIPTION = 'Generic paged repository for SQLAlchemy with count-decoupled pages, count-free slices and bulk updates.'

here = os.path.abspath(os.path.dirname(__file__))

try:
    with io.open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
        long_description = '\n' + f.read()
except FileNotFoundError:
    long_description = DESCRIPTION

setup(
    name='pagerepo',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='Apache-2.0 license',
    description=DESCRIPTION,
    long_description=long_description,
    long_description_content_type='text/markdown',
    install_requires=[
        'cachetools~=5.3',
        'pydantic>=2.5,<3',
        'python-dotenv~=1.0',
        'SQLAlchemy~=2.0.27',
    ],
    extras_require={
        'test': [
            'pytest>=7.4',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
    include_package_data=True,
    python_requires='>=3.9',
    keywords='sqlalchemy repository pagination slice bulk-update',
)
