# lilgraph

A small, human-friendly text format for directed graphs, and a library to
read it, change it, order it and write it back out.

## The format

```
// Nodes may be declared on their own, with an optional type and attributes.
A
B [service]
C [service; owner=ops, retries=3]
D [label="A quoted value, which may span
several lines and hold \"escaped\" quotes"]

# Edges may be chained, and may carry a type and attributes of their own.
A -> B -> C
B -[depends; weight=2.5]-> D
/* Block comments work too. */
```

- Node ids match `[a-zA-Z_][a-zA-Z0-9_]*`.
- `[type; key=value, ...]` sets a node's type and attributes; the type comes
  first, and the `;` after it and the `,` between attributes are optional.
  Both the type and the attributes may be left out.
- `-[type; key=value]->` does the same for an edge; a bare `->` is an untyped
  edge without attributes. Arrows may be drawn longer, as in `-->`.
- Attribute values are identifiers, numbers (such as `3`, `-2`, `2.5`, `.5`),
  or double-quoted strings in which `\"` is the only escape.
- A node keeps its first type: declaring it again with a different one is an
  error. An attribute named `type` (in any letter case) is not allowed.
- An edge from a node to itself is an error. Repeating an edge with the same
  endpoints and type refers to the same edge.
- Statements may be ended with an optional `;`.
- Comments are `// ...`, `# ...` and `/* ... */`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Using it

```python
from lilgraph.graph import parse_file
from lilgraph.errors import CyclicError, LilgraphError

try:
    graph = parse_file("deps.lilgraph")
except LilgraphError as exc:
    raise SystemExit(f"could not read graph: {exc}")

node = graph.find("C")           # look a node up by id, or None
print(node.get_attr("owner"))    # an attribute's value, or None

try:
    graph.sort_topo()            # order nodes by rank, stable within a rank
except CyclicError as exc:
    print(f"graph has a cycle: {exc}")

print(graph.marshal_text())      # write the graph back in canonical form
```

`lilgraph.graph.parse` does the same as `parse_file` for source text (`str`
or `bytes`) that is already in memory. `parse_file` reads the file itself, so
a missing file raises the usual `OSError`.

`sort_topo` gives each node the length of the longest path leading to it from
a node without incoming edges, then sorts `graph.nodes` by that rank, keeping
insertion order within a rank.

### Building graphs in code

`lilgraph.graph.Lilgraph` is the in-memory graph; `graph.nodes` and
`graph.edges` are tuples in insertion order.

- `add_node(node_id, typ="")` returns `(node, existed)`, creating the node or
  returning the one already there (and giving it `typ` if it had none).
- `add_edge(from_node, to_node, edge_type="")` returns `(edge, existed)` in
  the same way.
- `find`, `find_edge` (returns the edge or `None`) and `find_edges` (yields
  every edge between two nodes, whatever its type) look them up.
- `delete_node` and `delete_edge` remove them and return whether anything was
  removed; deleting a node removes every edge that touches it.

A `Node` has `id`, `type`, `edges_from`, `edges_to` and `decl_pos`; an `Edge`
has `from_node`, `to_node`, `type` and `pos`. Both carry ordered attributes
through `set_attr`, `get_attr`, `delete_attr`, `attrs_map` and
`replace_attrs`, the last keeping the order of keys that survive and adding
new ones at the end.

### Writing out

`marshal_text` (also `lilgraph.marshal.marshal_text(graph)`) writes one
statement per line and keeps items in the order they appeared in the source.
Nodes and edges added afterwards go at the end, nodes before edges. Nodes that
have no type or attributes, were never declared on their own and appear in
some edge are left out, because the edges already declare them.

Attribute values are quoted only when they hold a double quote or a newline.

### Lower layers

- `lilgraph.lexer.Lexer` scans text into `lilgraph.tokens.Token`s; iterating
  it yields tokens up to and including the end-of-file token.
- `lilgraph.parser.parse_ast(src, source=None)` returns the syntax tree, a
  `lilgraph.syntax.Graph` of `Node` and `EdgeChain` items, which can be
  written to and read from JSON with `to_json` and `Graph.from_json`.

### Errors

Every error the library raises is a `lilgraph.errors.LilgraphError`. The more
specific kinds are:

- `InvalidIdError`: a node id that is not a valid identifier.
- `ParseFailError`: the text is not valid lilgraph; the underlying
  `GrammarError` is its `__cause__`.
- `LoopError`: an edge from a node to itself.
- `TypeChangeError`: a node given a second, different type.
- `TypeInAttrsError`: an attribute called `type`.
- `CyclicError`: `sort_topo` on a graph with a cycle.

Syntax errors report line and column and what was expected, prefixed with the
file name when the graph was read with `parse_file`.

## What it does not do

lilgraph is a library only: it has no command-line tool. `marshal_text` does
not wrap long lines, and an attribute value with spaces or other characters
outside an identifier or number, but without a quote or newline, is written
unquoted and will not read back.