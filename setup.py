# setup.py

from setuptools import setup, find_packages

setup(
    name='remote-eq-editor',
    version='1.0.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'scipy',
        'matplotlib',
        'PyQt5>=5.15',
        'pyqtgraph',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'remote-eq-editor=remote_eq.cli.__main__:main',
        ],
    },
)
