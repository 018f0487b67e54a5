# tontonkit

A plain Python library, with no third-party runtime dependencies, for reading
skinned glTF 2.0 models and preparing their skeletons, meshes and animations
for creature analysis: joint hierarchies and rest poses, skinned-mesh
attribute layouts, animation channels, articulation output in the
`AGI_articulations` extension, and physical environment presets.

## Modules

### `tontonkit.gltf`

A small glTF document model. A `Document` holds the glTF JSON tree (`json`)
and the bytes of each buffer (`buffer_data`). Its properties `nodes`,
`meshes`, `skins`, `accessors`, `buffer_views`, `buffers`, `animations`,
`materials`, `scenes` and `extensions_used` return the matching JSON lists.
Each property adds an empty list to the tree if the list is missing.

- `load_document(path)` loads a `.gltf` file, with its external `.bin` files
  and base64 data URIs, or a `.glb` file.
- `load_documents(paths)` loads several files. It skips arguments that begin
  with `-` and prints any load failure to stderr. It returns `LoadedFile`
  records (`index`, `path`, `filename`, `document`). If a file loads but has
  no buffers, it returns an empty list.
- `save_document(doc, path)` writes `.glb`, or `.gltf` with `.bin` files
  beside it: `<stem>.bin` for the first buffer and `<stem><n>.bin` for the
  others. Any other extension raises `GltfError`.
- `parse_glb(data)` and `build_glb(doc)` read and write the binary container.
  The first buffer becomes the BIN chunk. Further buffers are embedded as
  data URIs.
- `Document.accessor_data(index)` resolves an accessor to an `AccessorView`,
  or returns `None` if the accessor, its buffer view or its buffer is
  missing.
- `Document.read_floats(accessor_index, count)` reads little-endian floats
  from an accessor.
- `component_size`, `component_count`, `invert_matrix` and
  `decompose_matrix` cover accessor layout and column-major 4×4 matrices.

Problems with a file or its data raise `GltfError`, which is a `ValueError`.

### `tontonkit.lf_rintintin`

Data classes for per-joint volumetric results, each with `to_json()` and
`from_json(data)`:

- `Metrics`: volume, surface area, centroid, inertia, AABB min and max, and
  covariance.
- `Eigen`: rotation and `lambda_`.
- `Transform`: rotation, translation and scaling.
- `RinTinTin`: lists of the above.

`to_json` leaves out optional fields that hold their default value.
`from_json` raises `GltfError` when a required field is missing or a value
has the wrong shape.

### `tontonkit.primitives`

Triangle lists for debug visualisation:

- `generate_icosphere(sphere_radius, subdivisions=2)`
- `generate_cylinder(radius, height, radial_segments=16)`
- `generate_cone(radius, height, radial_segments=16)`
- `generate_box(width, height, depth)`

The icosphere is scaled so that its volume matches a sphere of the given
radius. Cylinders and cones are widened so that their polygon cross-section
matches the circle's area.

`add_primitive(doc, name, triangles, limit)` appends a mesh to the first
buffer, using 16-bit indices, and returns the new mesh index. Vector helpers
`dot`, `cross` and `normalize` are also provided.

### `tontonkit.skin`

- `mesh_from_primitive(doc, primitive)` describes a skinned primitive as
  `MeshData`. It requires `POSITION`, `JOINTS_0` and `WEIGHTS_0`, and returns
  `Attribute` layouts, index data, `GeometryType` and `SurfaceMode`. A
  double-sided, non-opaque material is treated as a thin-shell alpha card.
- `skin_from_skin(doc, skin_index)` returns `SkinData`: joint names, joint
  origins, parent joints and rotations. When the inverse bind matrices are a
  float `MAT4` accessor with one matrix per joint, the origins and rotations
  are taken from those matrices.

### `tontonkit.chacha`

- `extract_animation_channels(doc)` collects rotation, translation and scale
  channels as `AnimationChannel` values, keyed by glTF node index. It also
  records the indices of animations whose names start with `AGI_`, ignoring
  case.
- `extract_skeleton(doc, skin_index)` returns an `ExtractedSkeleton` with
  parents, node-local rest poses and `joint_nodes`.
  `ExtractedSkeleton.as_skeleton()` converts it to a `Skeleton`.
- `Stage`, `StageType` and `Articulation` describe joint limits. Rotations
  are in radians.

### `tontonkit.agi`

- `write_agi_articulations(doc, articulations, joint_nodes)` stores the
  document-level and node-level `AGI_articulations` extension, with rotations
  in degrees.
- `remove_agi_animations(doc)` drops `AGI_` animations and the accessor and
  buffer-view entries that only they used, and re-indexes every remaining
  reference. The buffer bytes themselves are left in place.
- `has_agi_articulations(doc)` tells whether the document already carries
  the extension.
- `articulations_json(doc, articulations, joint_nodes)` returns the
  articulations as JSON data. `print_articulations_json(stream, ...)` writes
  that data, indented, to a stream.
- `find_skin_index(doc)`, `remap_channels_to_joints(channels, joint_nodes)`
  and `default_output_path(input_path)` cover the surrounding steps.
  `default_output_path` returns `<stem>-chacha<ext>`.

### `tontonkit.environments`

`Environment` presets:

- Earth: `earth_air`, `earth_ocean`
- `titan`
- Exoplanets: `proxima_centauri_b`, `trappist_1e`, `kepler_442b`,
  `lhs_1140b`, `kepler_62f`, `k2_18b`, `wolf_1061c`, `gliese_667cc`
- `icy_moon_ocean`

`parse_environment(name)` looks a preset up by name, ignoring case. It also
accepts `carboniferous`/`carb` and `warm-titan`. An unknown name prints a
warning to stderr and returns Earth air.

## Example

```python
from tontonkit.agi import (
    default_output_path,
    find_skin_index,
    has_agi_articulations,
    remap_channels_to_joints,
    remove_agi_animations,
    write_agi_articulations,
)
from tontonkit.chacha import (
    Articulation,
    Stage,
    StageType,
    extract_animation_channels,
    extract_skeleton,
)
from tontonkit.gltf import load_document, save_document

doc = load_document("creature.glb")
skeleton = extract_skeleton(doc, find_skin_index(doc))
channels = remap_channels_to_joints(
    extract_animation_channels(doc).channels, skeleton.joint_nodes
)

articulations = [
    Articulation(node=0, stages=[Stage(StageType.X_ROTATE, -0.5, 0.5)]),
]
if not has_agi_articulations(doc):
    write_agi_articulations(doc, articulations, skeleton.joint_nodes)
    remove_agi_animations(doc)
    save_document(doc, default_output_path("creature.glb"))
```

## What it does not do

The library prepares and stores data. It does not compute:

- joint limits from animation: you supply the `Articulation` values yourself;
- volumes, inertia tensors or bounding boxes of skinned meshes;
- biomechanical creature analysis.

It installs no command-line programs.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.