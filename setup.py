from setuptools import setup, find_packages

setup(
    name="adpath",
    version="0.1",
    description="Create the missing organizational units of an Active Directory path",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=["ldap3", "textual"],
    extras_require={"test": ["pytest"]},
    package_data={"adpath": ["config.ini.example"]},
    entry_points={"console_scripts": ["adpath=adpath.cli:main"]},
)
