from setuptools import find_packages, setup

classifiers = [
    "Environment :: Console",
    "License :: OSI Approved :: MIT License",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.8",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3 :: Only",
    "Topic :: Terminals",
    "Topic :: Multimedia :: Graphics :: Viewers",
]

with open("README.md", "r") as fp:
    long_description = fp.read()

setup(
    name="img2ansi",
    version="0.3.0",
    author="img2ansi contributors",
    description="Render images and GIF animations in the terminal using ANSI colors",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=classifiers,
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "pillow>=9.1,<12.0",
        "requests>=2.23,<3.0",
        "typing_extensions>=4.0",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["img2ansi=img2ansi.__main__:main"]},
    keywords=[
        "image",
        "gif",
        "animation",
        "terminal",
        "PIL",
        "Pillow",
        "console",
        "cli",
        "ANSI",
        "256-color",
    ],
)
