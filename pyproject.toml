[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tontonkit"
version = "1.0.0"
description = "glTF skeleton, skin, animation and articulation tooling for creature analysis pipelines"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "gltf",
    "glb",
    "skeleton",
    "skinning",
    "animation",
    "articulation",
    "inertia",
    "mesh",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tontonkit"]

[tool.hatch.build.targets.sdist]
include = ["tontonkit", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
