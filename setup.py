from setuptools import setup, find_packages

setup(
    name='sway-buffer',
    version='0.1.0',
    description='Text buffer and incremental syntax highlighting core for terminal editors',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    author='Siergej Sobolewski',
    author_email='s.sobolewski@hotmail.com',
    url='https://github.com/yourusername/sway-buffer',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'pygments>=2.13.0',
        'toml>=0.10.2',
        'chardet>=5.0.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Programming Language :: Python :: 3.11',
    ],
    python_requires='>=3.11',
    license='GPLv3',
)
