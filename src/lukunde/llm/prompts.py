"""Prompts for the school-gradebook assistant."""

SUGGESTION_SYSTEM_PROMPT = (
    "Você ajuda professores a organizar pautas escolares. "
    "Responda apenas com o texto pedido, sem explicações."
)

CLASS_COLUMN_PROMPT = """Dada a seguinte lista de cabeçalhos de uma planilha escolar: {headers}.
Qual deles é mais provável de representar a "Turma", "Classe" ou "Série"?
Retorne APENAS o nome exato do cabeçalho. Se nenhum parecer apropriado, retorne "null"."""

ANALYSIS_SYSTEM_PROMPT = (
    'Você é um assistente de análise de dados para uma aplicação escolar chamada "Educa-Lukunde".'
)

ANALYSIS_PROMPT = """Abaixo está uma amostra dos dados da planilha atual (formato CSV).

DADOS:
{csv_context}

PERGUNTA DO USUÁRIO:
"{query}"

Responda de forma concisa, profissional e útil para um professor ou gestor escolar.
Se a pergunta for sobre separar turmas, explique que eles podem usar o botão "Separar Turmas" na barra de ferramentas."""
