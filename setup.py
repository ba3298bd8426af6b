from setuptools import setup, find_packages

with open("Readme.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pve-report-agent",
    version="1.0.0",
    author="PVE Report Agent Team",
    description='Agent pour remonter périodiquement les VM et conteneurs Proxmox VE vers une API centrale.',
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.8',
    install_requires=[
        "requests>=2.28.0",
        "urllib3>=1.26.0",
        "schedule>=1.2.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ],
    },

    entry_points='''
        [console_scripts]
        pve-report-agent=pve_agent.main:main
    '''
)
