from setuptools import setup, find_packages

setup(
    name='anki_builder',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=[
        'requests',
        'click',
        'rich',
        'pyyaml',
    ],
    extras_require={
        'tests': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'anki-builder=anki_builder.cli:main',
        ],
    },
    description='Generate Anki vocabulary cards with an LLM and add them through AnkiConnect',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.9',
)
