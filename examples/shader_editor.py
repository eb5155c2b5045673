"""Shader editor session driven from Python.

This example builds a small shader registry and walks through the editing
gestures a node editor UI would translate into actions:
- adding nodes from an "Add" menu
- linking ports, including a rejected link between incompatible types
- dragging a node
- typing a literal into an unconnected input
- creating a node group and editing inside it
"""

import logging

from shader_types import Color, ColorRamp

import blendnodes as bn

logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

# -----------------------------------------------------------------------------
# Registries
# -----------------------------------------------------------------------------

FLOAT = bn.DataType("float", "Float", bn.UnderlyingType.NUMBER, "#a1a1a1")
COLOR = bn.DataType("color", "Color", bn.UnderlyingType.COMPLEX, "#c7c729", schema=Color)
RAMP = bn.DataType("ramp", "Color Ramp", bn.UnderlyingType.COMPLEX, "#c7c729", schema=ColorRamp)
SHADER = bn.DataType("shader", "Shader", bn.UnderlyingType.STRING, "#63c763", shape=bn.HandleShape.DIAMOND)

NOISE = bn.NodeType(
    "noise",
    "Noise Texture",
    header_color="#83314a",
    inputs=(
        bn.PortDefinition("scale", "float", allow_input=True, default_value=5.0),
        bn.InputPanel(
            "Detail",
            (
                bn.PortDefinition("detail", "float", allow_input=True, default_value=2.0),
                bn.PortDefinition("roughness", "float", allow_input=True, default_value=0.5),
            ),
        ),
    ),
    outputs=(bn.PortDefinition("fac", "float"), bn.PortDefinition("color", "color")),
)
COLOR_RAMP = bn.NodeType(
    "color_ramp",
    "Color Ramp",
    header_color="#3c3c83",
    inputs=(
        bn.PortDefinition("fac", "float", allow_input=True, default_value=0.5),
        bn.PortDefinition("ramp", "ramp", allow_input=True, default_value={"positions": [0.0, 1.0]}),
    ),
    outputs=(bn.PortDefinition("color", "color"),),
)
BSDF = bn.NodeType(
    "principled_bsdf",
    "Principled BSDF",
    header_color="#246283",
    inputs=(
        bn.PortDefinition("base_color", "color", allow_input=True, default_value={"r": 0.8, "g": 0.8, "b": 0.8}),
        bn.PortDefinition("roughness", "float", allow_input=True, default_value=0.5),
    ),
    outputs=(bn.PortDefinition("bsdf", "shader"),),
)


def main() -> None:
    editor = bn.GraphEditor.create(
        [FLOAT, COLOR, RAMP, SHADER],
        [NOISE, COLOR_RAMP, BSDF],
        options=bn.EditorOptions(id_strategy=bn.IdStrategy.COUNTER, id_prefix="n"),
    )
    editor.subscribe(lambda _previous, current: print(f"  graph now has {len(current.active_graph)} node(s)"))

    editor.dispatch(bn.AddNode(type_id="noise", position=bn.Position(-400, 0)))
    noise = editor.last_created_id
    editor.dispatch(bn.AddNode(type_id="color_ramp", position=bn.Position(-200, 0)))
    ramp = editor.last_created_id
    editor.dispatch(bn.AddNode(type_id="principled_bsdf"))
    bsdf = editor.last_created_id
    assert noise is not None and ramp is not None and bsdf is not None

    editor.dispatch(bn.Connect(source=noise, source_handle="fac", target=ramp, target_handle="fac"))
    editor.dispatch(bn.Connect(source=ramp, source_handle="color", target=bsdf, target_handle="base_color"))

    # A float output cannot drive a color input
    editor.dispatch(bn.Connect(source=noise, source_handle="fac", target=bsdf, target_handle="base_color"))
    print(f"Rejected: {editor.last_rejection}")

    # Dragging the ramp node 40 units to the right
    ramp_node = editor.active_graph.nodes[ramp]
    editor.dispatch(bn.UpdateNodePosition(node_id=ramp, position=ramp_node.position.moved_by(40, 0)))

    editor.dispatch(bn.UpdateNodeInputValue(node_id=bsdf, port_name="roughness", value=0.2))
    editor.dispatch(bn.UpdateNodeInputValue(node_id=ramp, port_name="ramp", value={"positions": [0.0]}))
    print(f"Rejected: {editor.last_rejection}")

    editor.dispatch(bn.RegisterNodeGroupType(name="Weathering"))
    weathering = editor.last_created_id
    assert weathering is not None
    editor.dispatch(bn.AddNode(type_id=weathering, position=bn.Position(200, 0)))
    group = editor.last_created_id
    assert group is not None
    editor.dispatch(bn.OpenNodeGroup(node_id=group))
    editor.dispatch(bn.AddNode(type_id="noise"))
    print(" > ".join(editor.navigation_stack.breadcrumbs()))
    editor.dispatch(bn.CloseNodeGroup(depth=0))

    print(f"Execution order: {editor.state.execution_order()}")


if __name__ == "__main__":
    main()
