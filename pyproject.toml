[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pearengine"
version = "0.1.0"
description = "A small scene-graph 3D engine that loads glTF models and renders them with OpenGL"
requires-python = ">=3.10"
keywords = ["3d", "engine", "scene graph", "gltf", "glb", "opengl", "rendering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "numpy",
    "pyglet",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pearengine-demo = "pearengine.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["pearengine"]

[tool.pytest.ini_options]
addopts = "-ra"
