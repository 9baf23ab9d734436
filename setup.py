"""Setup script for crawl-ls."""

from setuptools import setup, find_packages

# Requirements matching one of these names go into the "dev" extra
DEV_TOOLS = ("pytest", "black", "isort", "mypy", "pylint")


def read_file(file_path):
    with open(file_path, 'r', encoding='utf-8') as f:
        return f.read()


def read_requirements(file_path):
    lines = (line.strip() for line in read_file(file_path).splitlines())
    return [line for line in lines if line and not line.startswith('#')]


requirements = read_requirements('requirements.txt')
dev_requirements = [req for req in requirements if req.startswith(DEV_TOOLS)]
install_requirements = [req for req in requirements if req not in dev_requirements]

setup(
    name="crawl-ls",
    version=read_file("VERSION").strip(),
    author="crawl-ls contributors",
    description="Language server that resolves links under the cursor into cached Markdown pages",
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=install_requirements,
    extras_require={"dev": dev_requirements},
    entry_points={
        "console_scripts": ["crawl-ls=src.crawl_ls.apps.cli:main"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Text Editors :: Integrated Development Environments (IDE)",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
)
