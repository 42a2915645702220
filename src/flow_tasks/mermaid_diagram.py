# src/flow_tasks/mermaid_diagram.py

"""
Mermaid flowchart rendering for voice-agent flows.

Deterministic: same flow in, same text out. Generator-assigned node ids
never reach the output; each node is emitted as N{index}, its position
in the flow's node list. Edges pointing at unknown ids are dropped.
"""

from typing import Dict, Union

from config import DiagramLimits, diagram_limits
from flow_models import FlowGraph, Node
from flow_tasks.utils import sanitize_label, truncate_label


PLACEHOLDER_DIAGRAM = 'graph TD\n    Start[Start]'
ERROR_DIAGRAM = 'graph TD\n    Error[Error]'
NO_TRANSCRIPT_DIAGRAM = 'graph TD\n    Start[No transcript available]'

# Minimalist black and white styling
CLASS_DEFS = [
    'classDef default fill:#ffffff,stroke:#000000,stroke-width:2px,color:#000000',
    'classDef greeting fill:#f8f8f8,stroke:#000000,stroke-width:3px,color:#000000',
    'classDef question fill:#ffffff,stroke:#000000,stroke-width:2px,stroke-dasharray: 5 5,color:#000000',
    'classDef decision fill:#f0f0f0,stroke:#000000,stroke-width:2px,color:#000000',
    'classDef confirmation fill:#ffffff,stroke:#000000,stroke-width:3px,color:#000000',
    'classDef farewell fill:#e8e8e8,stroke:#000000,stroke-width:2px,color:#000000',
]

# type -> (shape, style class)
NODE_STYLES = {
    'greeting': ('stadium', 'greeting'),
    'farewell': ('stadium', 'farewell'),
    'decision': ('rhombus', 'decision'),
    'question': ('rectangle', 'question'),
    'confirmation': ('rectangle', 'confirmation'),
}


def _node_line(safe_id: str, node: Node, limits: DiagramLimits) -> str:
    label = truncate_label(sanitize_label(node.content or 'Node'), limits.label)

    summary = ''
    if node.full_prompt:
        summary = truncate_label(
            sanitize_label(node.full_prompt[:limits.summary_source]),
            limits.summary
        )

    shape, class_type = NODE_STYLES.get(node.type, ('rectangle', ''))

    if shape == 'stadium':
        line = f'    {safe_id}(["{label}"])'
    elif shape == 'rhombus':
        line = f'    {safe_id}{{"{label}"}}'
    elif summary:
        line = f'    {safe_id}["{label}<br/><small>{summary}</small>"]'
    else:
        line = f'    {safe_id}["{label}"]'

    if class_type:
        line += f':::{class_type}'
    return line + '\n'


def _build_diagram(flow: FlowGraph, limits: DiagramLimits) -> str:
    if not flow.nodes:
        return PLACEHOLDER_DIAGRAM

    diagram = 'graph TD\n'
    diagram += ''.join(f'    {c}\n' for c in CLASS_DEFS)
    diagram += '\n'

    # Positional ids: index in the original list, id-less nodes skipped
    id_table: Dict[str, str] = {}
    retained = []
    for index, node in enumerate(flow.nodes):
        if not node.id:
            continue
        safe_id = f'N{index}'
        id_table[node.id] = safe_id
        retained.append((safe_id, node))

    if not retained:
        return PLACEHOLDER_DIAGRAM

    for safe_id, node in retained:
        diagram += _node_line(safe_id, node, limits)

    for edge in flow.edges:
        from_id = id_table.get(edge.source)
        to_id = id_table.get(edge.target)
        if not from_id or not to_id:
            continue
        if edge.condition:
            condition = sanitize_label(edge.condition[:limits.condition])
            diagram += f'    {from_id} -->|{condition}| {to_id}\n'
        else:
            diagram += f'    {from_id} --> {to_id}\n'

    return diagram


def render_mermaid(
    flow: Union[FlowGraph, Dict, None],
    limits: DiagramLimits = None
) -> str:
    """
    Render a flow as a Mermaid flowchart.

    Accepts a FlowGraph or its raw dict form. Never raises: an empty
    flow gives the Start placeholder, an internal fault the Error one.
    """
    limits = limits or diagram_limits
    try:
        if flow is None:
            return PLACEHOLDER_DIAGRAM
        if not isinstance(flow, FlowGraph):
            flow = FlowGraph.from_dict(flow)
        return _build_diagram(flow, limits)
    except Exception as e:
        print(f"    [Diagram] ✗ Error generating Mermaid diagram: {e}")
        return ERROR_DIAGRAM
