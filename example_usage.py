#!/usr/bin/env python3
"""
Example usage of the gltf_core package

This script demonstrates loading a glTF document, reading vertex data through
typed accessor views, walking the node hierarchy and handling load errors.
"""

import base64
import json
import struct
import sys

from gltf_core import GLTFDocument, GLTFError, ImportOptions, ValidationLevel, pack_glb


def create_sample_gltf():
    """Create a simple sample GLTF document for demonstration"""
    # Simple triangle mesh
    vertices = [0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0]
    indices = [0, 1, 2]

    # Pack vertex data (9 floats = 36 bytes) and index data (3 shorts = 6 bytes)
    vertex_data = struct.pack('<9f', *vertices)
    index_data = struct.pack('<3H', *indices)
    data = vertex_data + index_data + b'\x00\x00'

    gltf_data = {
        "asset": {
            "version": "2.0",
            "generator": "gltf_core example"
        },
        "scene": 0,
        "scenes": [{
            "name": "SampleScene",
            "nodes": [0]
        }],
        "nodes": [
            {"name": "Parent", "children": [1], "translation": [0.0, 2.0, 0.0]},
            {"name": "TriangleNode", "mesh": 0},
        ],
        "meshes": [{
            "name": "TriangleMesh",
            "primitives": [{
                "attributes": {
                    "POSITION": 0
                },
                "indices": 1,
                "mode": 4  # TRIANGLES
            }]
        }],
        "buffers": [{
            "byteLength": len(data),
            "uri": "data:application/octet-stream;base64," + base64.b64encode(data).decode('ascii')
        }],
        "bufferViews": [
            {
                "buffer": 0,
                "byteOffset": 0,
                "byteLength": 36,
                "target": 34962  # ARRAY_BUFFER
            },
            {
                "buffer": 0,
                "byteOffset": 36,
                "byteLength": 6,
                "target": 34963  # ELEMENT_ARRAY_BUFFER
            }
        ],
        "accessors": [
            {
                "bufferView": 0,
                "componentType": 5126,  # FLOAT
                "count": 3,
                "type": "VEC3",
                "max": [1.0, 1.0, 0.0],
                "min": [0.0, 0.0, 0.0]
            },
            {
                "bufferView": 1,
                "componentType": 5123,  # UNSIGNED_SHORT
                "count": 3,
                "type": "SCALAR"
            }
        ]
    }

    return gltf_data, data


def demonstrate_basic_usage():
    """Demonstrate loading and reading vertex data"""
    print("=== Basic GLTF Loading Demo ===")

    gltf_data, _ = create_sample_gltf()
    doc = GLTFDocument.load_from_bytes(json.dumps(gltf_data).encode('utf-8'))

    print(f"[OK] Loaded {doc}")

    reader = doc.primitive_reader(0)
    positions = reader.read_positions()
    print(f"  - Vertices: {list(positions)}")
    print(f"  - Indices: {list(reader.read_indices())}")

    array = positions.to_numpy()
    print(f"  - Position array shape: {array.shape}, dtype: {array.dtype}")
    print(f"  - Bounding box: min={array.min(axis=0)}, max={array.max(axis=0)}")
    print()


def demonstrate_scene_walk():
    """Demonstrate walking the node hierarchy of the default scene"""
    print("=== Scene Walk Demo ===")

    gltf_data, _ = create_sample_gltf()
    doc = GLTFDocument.load_from_bytes(json.dumps(gltf_data).encode('utf-8'))

    for index, parent, depth in doc.walk_scene():
        node = doc.get_node(index)
        print(f"  {'  ' * depth}- {node.name} (parent: {parent}, mesh: {node.mesh})")
    print(f"  - Lookup by name: TriangleNode -> {doc.find_index('nodes', 'TriangleNode')}")
    print()


def demonstrate_glb():
    """Demonstrate loading the same content from a binary container"""
    print("=== GLB Demo ===")

    gltf_data, data = create_sample_gltf()
    gltf_data["buffers"] = [{"byteLength": len(data)}]
    glb = pack_glb(json.dumps(gltf_data).encode('utf-8'), data)

    doc = GLTFDocument.load_from_bytes(glb, ImportOptions(validation=ValidationLevel.MINIMAL))
    print(f"[OK] Loaded {len(glb)} byte GLB with {len(doc.buffer_data(0))} byte binary chunk")
    print()


def demonstrate_error_handling():
    """Demonstrate the structured errors raised for invalid input"""
    print("=== Error Handling Demo ===")

    gltf_data, _ = create_sample_gltf()
    gltf_data["nodes"][1]["mesh"] = 7

    try:
        GLTFDocument.load_from_bytes(json.dumps(gltf_data).encode('utf-8'))
    except GLTFError as e:
        print(f"[FAIL] {type(e).__name__}: kind={e.kind} index={e.index} path={e.path}")
    print()


def main():
    """Main demonstration function"""
    print("gltf_core - Usage Examples")
    print("=" * 40)
    print()

    demonstrate_basic_usage()
    demonstrate_scene_walk()
    demonstrate_glb()
    demonstrate_error_handling()

    print("Demo completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
