from setuptools import setup, find_packages

setup(
    name="record-validation-lib",
    version="0.1.0",
    description="Declarative record validation library with localized messages",
    author="Jude Payne",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'record_validation': ['local-config.yaml', 'locales/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
        'sqlalchemy>=2.0',
        'email-validator>=2.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
        'postgres': ['psycopg2-binary>=2.9'],
        'mysql': ['pymysql>=1.0'],
    },
    python_requires='>=3.9',
)
