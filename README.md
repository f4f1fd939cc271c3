# pearengine

A small 3D engine built around a scene graph. A scene is a tree of nodes.
Position, rotation and scale nodes place what comes after them. Model nodes
load glTF (`.gltf` / `.glb`) files into meshes. A camera node sets the view.
Script nodes run a callback every frame. Drawing goes through OpenGL via
pyglet.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Building a scene

```python
from pearengine.app import create_app
from pearengine.nodes import root, Container, Pos, Rotation, Scale, Camera, Script
from pearengine.model import Model

app = create_app("pear app", 800, 600)

scene = root("root")

camera_container = Container(scene, "camera container")
Pos(camera_container, "pos", 0.0, 0.0, 10.0)
Rotation(camera_container, "rotation", 0.0, -90.0, 0.0)
Camera(camera_container, "camera")

def spin(script, dt):
    script.sibling("rotation").rotation[1] += 10.0 * dt

fish = Container(scene, "fish container")
Script(fish, "script", spin)
Rotation(fish, "rotation", 0.0, 0.0, 0.0)
Scale(fish, "scale", 5.0, 5.0, 5.0)
Model(fish, "model", "assets/BarramundiFish.glb")

app.set_root(scene)
app.run()
```

### Nodes (`pearengine.nodes`)

Every node is created with its parent and a name, and appends itself to the
parent's `children`. Names are cut to 127 characters.

- `root(name)` makes a node with no parent.
- `Container`: groups children and does nothing else.
- `Pos(parent, name, x, y, z)`, `Rotation(...)` and `Scale(...)` hold a
  3-vector in `pos`, `rotation` (Euler angles in degrees) and `scale`.
- `Camera`: sets the view from the position and rotation in effect where
  it sits. The X angle is the pitch and the Y angle is the yaw.
- `Script(parent, name, on_update)` calls `on_update(script, dt)` on every
  update.

Each node has these methods:

- `update(dt)` runs through the subtree and calls the scripts.
- `sibling(name)` returns the first child of the parent with that name, or
  `None`. It raises `ValueError` on a node with no parent.
- `walk()` yields the subtree in pre-order.
- `delete()` releases the subtree.

Transforms build up during rendering. Translations and rotations add, and
scales multiply. A transform node changes the state seen by the siblings
that follow it and by their subtrees. It does not affect the siblings that
come before it, and it does not reach beyond its parent.

### Models (`pearengine.model`)

`Model(parent, name, filename)` loads the file and adds one `Mesh` child for
each triangle primitive of the meshes in its scenes. The node's world
transform is baked into the positions.

Each vertex holds a position (3), texture coordinates (2) and a normal (3),
interleaved. Materials are shared by name in `Model.materials`. A base
colour texture is decoded with Pillow into RGBA pixels, and its filters come
from the glTF sampler (nearest when it has none). Textures that are not
embedded are read relative to the model's directory. Errors raise
`pearengine.gltf.GltfError`.

The glTF reader itself is in `pearengine.gltf`:

- `load_gltf(path)` returns a `GltfDocument`, which provides
  `read_accessor`, `read_indices`, `world_matrix` and `image_bytes`.
- `interleave(positions, tex_coords, normals)` packs the vertex data.

### Rendering (`pearengine.renderer`)

`Renderer.collect(node)` walks a tree and returns a list of `DrawCall`s.
Each call holds the mesh, its material, and the model, projection and view
matrices. No GL context is needed for this.

`Renderer.render(node)` does the same and hands the calls to its backend, if
it has one. `GlBackend` draws them with a textured shader. It does no
lighting. It culls front faces and tests depth with less-or-equal.

The projection is a 45° perspective with near 0.1 and far 100. It is rebuilt
on `WINDOW_RESIZED` events.

The matrix helpers are in `pearengine.transforms`.

### App (`pearengine.app`)

`create_app(title, width, height)` opens a `Window` and sets up a
`Renderer` with a `GlBackend`. `App.run()` repeats `App.step()` until a
`QUIT` event arrives, then calls `App.close()`.

Each step does the following, in order:

1. polls input
2. renders
3. swaps buffers
4. updates the scene with the elapsed time

`App` is also a context manager that closes on exit.

## Events

`pearengine.events.EventBus` carries window and input events. The event
types are:

- `EventType.QUIT`
- `WINDOW_RESIZED`
- `KEY_PRESSED`
- `KEY_RELEASED`
- `BUTTON_PRESSED`
- `BUTTON_RELEASED`
- `MOUSE_MOVED`

`subscribe(func, user_data)` registers a callback. `send` calls the
subscribers in the order they subscribed, as
`func(event_type, event, user_data)`.

The payloads are `WindowResizedEvent`, `KeyEvent`, `ButtonEvent` and
`MouseMovedEvent`. A `MouseMovedEvent` holds the position with the origin at
the top left, plus the change since the last move. Key and button codes are
in `Key` and `MouseButton`.

`pearengine.window.InputTranslator` turns raw input calls into these events.
Closing the window sends `QUIT`.

## Demo

The demo scene has a camera, an avocado and a spinning fish. It expects
`Avocado.glb` and `BarramundiFish.glb` in an assets directory, which is
`assets` by default:

```
pearengine-demo --assets path/to/assets
```

Press Escape or close the window to quit. If a model cannot be loaded, the
command prints the error and exits with status 1.

## Limits

- Primitives must be triangles. Any other mode raises `GltfError`.
- Only the base colour texture of a material is used. There is no lighting,
  no animation and no skinning.
- The camera uses only pitch and yaw.