from setuptools import setup, find_packages

setup(
    name='line-pad',
    version='0.1.0',
    description='Terminal line editor with grapheme-aware editing and syntax highlighting',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'grapheme>=0.6.0',
        'wcwidth>=0.2.5',
        'pygments>=2.13.0',
        'toml>=0.10.2',
        'chardet>=5.0.0',
        'windows-curses>=2.3.0; platform_system == "Windows"',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'line-pad = line_pad.editor:main'
        ]
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Environment :: Console :: Curses',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Programming Language :: Python :: 3.11',
        'Topic :: Text Editors',
    ],
    python_requires='>=3.11',
    license='GPLv3',
)
