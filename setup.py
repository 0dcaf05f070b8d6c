from setuptools import setup, find_packages

setup(
    name="exper-gateway",
    version="1.0.0",
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['main', 'config'],
    install_requires=[
        'Flask>=2.3.2',
        'Flask-CORS>=4.0.0',
        'python-dateutil>=2.8.2',
        'python-dotenv>=1.0.0',
        'pytz>=2023.3',
        'requests>=2.31.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
            'pytest-mock>=3.11.1',
        ],
    },
)
