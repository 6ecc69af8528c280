from langchain_core.prompts import PromptTemplate

SUPPORT_DOCS_START = "--- INÍCIO DOS DOCUMENTOS DE APOIO ---"
SUPPORT_DOCS_END = "--- FIM DOS DOCUMENTOS DE APOIO ---"
BLOCK_SEPARATOR = "\n\n---\n\n"
UNIT_SEPARATOR = "\n\n"

ENTRY_BLOCK_TEMPLATE = PromptTemplate(
    input_variables=["name", "units"],
    template='Contexto do ficheiro "{name}":\n{units}',
)

SUPPORT_DOCS_TEMPLATE = PromptTemplate(
    input_variables=["blocks"],
    template=SUPPORT_DOCS_START + "\n{blocks}\n" + SUPPORT_DOCS_END,
)

RAG_INSTRUCTION_TEMPLATE = PromptTemplate(
    input_variables=["context"],
    template=(
        "\n\nAdicionalmente, utilize o conteúdo dos seguintes documentos de apoio "
        "(RAG) como base de conhecimento:\n\n{context}"
    ),
)
