[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hapticsim"
version = "0.1.0"
description = "Haptic contact simulations (sphere and torus) with a simulated force-feedback device and a UDP tool-state link"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["haptics", "force feedback", "simulation", "contact model", "udp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hapticsim-sphere = "hapticsim.sphere:main"
hapticsim-torus = "hapticsim.torus:main"
hapticsim-processor = "hapticsim.processor:main"
hapticsim-renderer = "hapticsim.renderer:main"

[tool.hatch.build.targets.wheel]
packages = ["hapticsim"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
