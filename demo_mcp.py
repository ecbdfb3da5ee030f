import sys
sys.path.insert(0, 'src')
import json
import tempfile
from pathlib import Path
from pipeoutline_mcp.tools.get_outline import get_outline
from pipeoutline_mcp.tools.find_nodes import find_nodes
from pipeoutline_mcp.tools.get_property_values import get_property_values
from pipeoutline_mcp.tools.list_pipeline_files import list_pipeline_files

PIPELINE = """stages:
- stage: Build
  jobs:
  - job: Compile
    steps:
    - task: DotNetCoreCLI@2
      inputs:
        command: build
    - script: echo done
"""

def demo_file(path):
    print('=== Outline ===')
    result = get_outline(str(path), flat=True)
    for entry in result['outline']:
        print(f"{'  ' * entry['depth']}{entry['key']}: {entry['value']}")

    print('\n=== Occurrences of "task" ===')
    for node in find_nodes(str(path), 'task')['nodes']:
        print(f"line {node['range']['start']['line']}: {node['value']}")

    print('\n=== inputs at line 5 ===')
    print(json.dumps(get_property_values(str(path), 5, 8, 'inputs')['values'], indent=2))

def demo_workspace():
    print('\n=== Pipelines in current directory ===')
    result = list_pipeline_files('.')
    print(f"Files: {result.get('file_count', 0)}")
    for entry in result.get('files', []):
        print(f"  {entry['path']} ({entry['node_count']} nodes)")

with tempfile.TemporaryDirectory() as tmp:
    path = Path(tmp) / 'azure-pipelines.yml'
    path.write_text(PIPELINE)
    demo_file(path)
demo_workspace()
