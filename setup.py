from setuptools import find_packages, setup

PACKAGE_NAME = 'simconnect_remote'

setup(
    name=PACKAGE_NAME,
    version='0.1.0',
    description='Client for the SimConnect TCP protocol with a ZeroMQ bridge',
    license='Apache-2.0',
    python_requires='>=3.9',
    packages=find_packages(include=[PACKAGE_NAME, PACKAGE_NAME + '.*']),
    install_requires=[
        'msgpack',
        'pyzmq',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'simconnect-bridge = simconnect_remote.bridge.server:main',
        ],
    },
)
