from setuptools import setup

setup(
    name="snap-accesslog",
    version="1.0",
    author="Batuhan Erkoc",
    description="Access log parser reporting unique visitors, top URLs and top IPs",
    py_modules=[
        "cli_main",
        "log_analyzer",
        "log_parser",
        "log_service",
        "log_visualizer",
    ],
    package_dir={"": "src"},               # src klasörü baz alınıyor
    entry_points={
        "console_scripts": [
            "snap-accesslog=cli_main:main",
        ],
    },
    python_requires=">=3.8",
    install_requires=[
        "pandas>=1.5",
        "matplotlib>=3.6",
        "seaborn>=0.13",
        "psutil",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
