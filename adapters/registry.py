from adapters.graphql_adapter import GraphQLAdapter
from adapters.java_adapter import JavaAdapter

ADAPTERS = {
    JavaAdapter.language: JavaAdapter(),
    GraphQLAdapter.language: GraphQLAdapter(),
}


def get_adapter(language: str):
    adapter = ADAPTERS.get(language)
    if adapter is None:
        raise ValueError(f"Parsing not yet implemented for language: {language}")
    return adapter
