#!/usr/bin/env python

from setuptools import setup

setup(
    name='termtogif',
    version='0.1.0',
    license='BSD 3-clause license',
    description='Render scripted terminal sessions as GIF animations',
    long_description='Type a list of commands in a simulated terminal window, '
                     'display their output evaluated by an external '
                     'interpreter and render the session as a looping GIF '
                     'animation.',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: MacOS',
        'Operating System :: POSIX :: BSD',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Terminals'
    ],
    python_requires='>=3.8',
    packages=[
        'termtogif',
        'termtogif.tests'
    ],
    scripts=['scripts/termtogif'],
    package_data={
        'termtogif': ['data/*.ini'],
    },
    include_package_data=True,
    install_requires=[
        'Pillow>=10.1',
        'wcwidth',
    ],
    extras_require={
        'dev': [
            'coverage',
            'pylint',
            'twine',
            'wheel',
        ]
    }
)
