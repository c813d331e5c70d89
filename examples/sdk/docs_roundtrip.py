import os

import dotenv

from ai_paralegal_sdk import AiParalegalClient, DocCreateOptions, Docs

dotenv.load_dotenv()

with AiParalegalClient() as client:
    session = client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])
    docs = Docs(client, session.session_token)

    created = docs.create(
        DocCreateOptions(markdown="# Engagement letter\n\nDraft.", filename="engagement.docx", format="docx")
    )
    doc_id = created.data.id
    print("Created:", created.data.filename, doc_id)

    docs.update(doc_id, "Engagement letter\n\nSecond draft.")
    print("Markdown:\n", docs.to_markdown(doc_id).data.markdown)

    for meta in docs.list().data.documents:
        print("-", meta.id, meta.filename)

    docs.delete(doc_id)
