from setuptools import setup

setup(
    name='mrotools',
    version='0',
    packages=['mrotools'],
    python_requires='>=3.8',
    extras_require={
        'test': ['pytest'],
    },
    # # Uncomment to enable PEP-561 style type hinting and .pyi type hinting files.
    # package_data={
    #     # Conform to PEP-561
    #     'mrotools': ['py.typed']
    # },
    url='',
    license='',
    author='mrotools developers',
    author_email='',
    description='Method resolution order linearization and cooperative dispatch over declared type hierarchies.'
)
