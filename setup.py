from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='educonnect_backend',
    version='0.0.1',
    install_requires=requirements,
    package_dir={'': 'src'},
    packages=find_packages('src'),
    package_data={
        'educonnect_backend': ['alembic.ini', 'alembic/*.py', 'alembic/*.mako', 'alembic/versions/*.py'],
    },
    extras_require={
        'test': ['pytest', 'httpx'],
    },
)
