import sys
import os

ROOT = os.path.join(os.path.dirname(__file__), '..')

# to allow autodoc to discover the documented modules
sys.path.append(ROOT)

with open(os.path.join(ROOT, 'VERSION')) as infile:
    release = infile.read().strip()
version = '.'.join(release.split('.')[:2])

project = 'Spatialvote'

extensions = [
    'sphinx.ext.autodoc',
    'recommonmark',
]

source_suffix = {
    '.rst': 'restructuredtext',
    '.md': 'markdown',
}

# keep the evaluators next to their helper functions
autodoc_member_order = 'bysource'
# matplotlib is only needed for plotting territory maps
autodoc_mock_imports = ['matplotlib']

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinxdoc'
