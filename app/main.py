"""
Streamlit Frontend for FinTrack

A thin presentation layer over the store. It holds no business logic:
every button calls a store mutation, and every figure on screen comes
from the store's derived views.

Pages:
1. Resumo - totals, spent-vs-goal and by-category charts, transaction list, CSV download
2. Nova Transação - the add form
3. Metas - per-category goals and new categories
4. Configurações - storage location and settings status
"""

import pandas as pd
import plotly.express as px
import streamlit as st

from fintrack.audit import configure_logging
from fintrack.config import get_settings, validate_all_settings
from fintrack.models.transaction import TransactionDraft, TransactionKind
from fintrack.reports import format_amount
from fintrack.store import Store, create_store
from fintrack.validation import InputValidationError


# Page configuration
st.set_page_config(
    page_title="FinTrack",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

KIND_LABELS = {
    TransactionKind.INCOME: "Receita",
    TransactionKind.EXPENSE: "Despesa",
}


@st.cache_resource
def get_store() -> Store:
    """Create the store once per server process and load the snapshot."""
    configure_logging(get_settings().app.log_level)
    return create_store()


def main():
    """Main application entry point."""
    store = get_store()
    currency = get_settings().app.currency_symbol

    st.sidebar.title("💰 FinTrack")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navegar:",
        ["📊 Resumo", "➕ Nova Transação", "🎯 Metas", "⚙️ Configurações"],
        index=0,
    )

    st.sidebar.markdown("---")
    months = store.available_months()
    month_key = st.sidebar.selectbox(
        "Filtrar por mês:",
        options=[""] + months,
        format_func=lambda m: "Todos os meses" if not m else m,
    )

    if page == "📊 Resumo":
        render_summary_page(store, month_key, currency)
    elif page == "➕ Nova Transação":
        render_add_page(store)
    elif page == "🎯 Metas":
        render_goals_page(store)
    elif page == "⚙️ Configurações":
        render_settings_page(store)


def render_summary_page(store: Store, month_key: str, currency: str):
    """Render totals, charts and the filtered transaction list."""
    st.title("📊 Resumo")
    view = store.view(month_key)

    col1, col2, col3 = st.columns(3)
    col1.metric("Receitas", format_amount(view.totals.income, currency))
    col2.metric("Despesas", format_amount(view.totals.expense, currency))
    col3.metric("Saldo", format_amount(view.totals.balance, currency))

    st.markdown("### Gastos vs. Metas")
    if view.report:
        chart = pd.DataFrame(
            {
                "Meta": [float(row.goal) for row in view.report],
                "Gasto": [float(row.spent) for row in view.report],
            },
            index=[row.category for row in view.report],
        )
        col_bar, col_pie = st.columns(2)
        col_bar.bar_chart(chart)

        spent = chart[chart["Gasto"] > 0]
        if not spent.empty:
            fig = px.pie(
                spent.reset_index(names="Categoria"),
                values="Gasto",
                names="Categoria",
                hole=0.4,
                title="Gastos por Categoria",
            )
            col_pie.plotly_chart(fig, use_container_width=True)

        over = [row.category for row in view.report if row.over_goal]
        if over:
            st.warning("Meta ultrapassada: " + ", ".join(over))
    else:
        st.info("Nenhuma categoria cadastrada.")

    st.markdown("### Transações")
    if view.transactions:
        st.dataframe(
            [
                {
                    "Tipo": KIND_LABELS[t.kind],
                    "Descrição": t.description,
                    "Categoria": t.category,
                    "Valor": format_amount(t.amount, currency),
                    "Data": t.timestamp.astimezone().strftime("%d/%m/%Y %H:%M"),
                }
                for t in view.transactions
            ],
            use_container_width=True,
        )
    else:
        st.info("Nenhuma transação neste período.")

    st.download_button(
        "⬇️ Exportar CSV",
        data=store.csv_text(month_key).encode("utf-8"),
        file_name=get_settings().export.filename,
        mime="text/csv",
    )


def _submit_transaction(store: Store):
    """Form callback: submit the staged draft and clear the widgets on success."""
    draft = TransactionDraft(
        kind=st.session_state.draft_kind,
        description=st.session_state.draft_description,
        category=st.session_state.draft_category,
        amount_text=st.session_state.draft_amount,
    )
    try:
        transaction = store.submit_draft(draft)
    except InputValidationError as e:
        st.session_state.form_message = ("error", f"Valor inválido: {e.message}")
        return

    if transaction is None:
        st.session_state.form_message = ("warning", "Preencha descrição, valor e categoria.")
        return

    st.session_state.draft_description = draft.description
    st.session_state.draft_category = draft.category
    st.session_state.draft_amount = draft.amount_text
    st.session_state.form_message = ("success", "Transação adicionada.")


def render_add_page(store: Store):
    """Render the add-transaction form."""
    st.title("➕ Nova Transação")

    for key in ("draft_description", "draft_category", "draft_amount"):
        st.session_state.setdefault(key, "")
    st.session_state.setdefault("draft_kind", TransactionKind.INCOME)

    st.radio(
        "Tipo",
        options=list(TransactionKind),
        format_func=lambda k: KIND_LABELS[k],
        horizontal=True,
        key="draft_kind",
    )
    st.text_input("Descrição", key="draft_description")
    st.text_input("Valor", key="draft_amount", placeholder="0,00")
    st.text_input(
        "Categoria",
        key="draft_category",
        help="Categorias: " + ", ".join(store.categories),
    )

    st.button("Adicionar", type="primary", on_click=_submit_transaction, args=(store,))

    message = st.session_state.pop("form_message", None)
    if message:
        level, text = message
        getattr(st, level)(text)


def _update_goal(store: Store, category: str):
    """Input callback: store the goal typed for a category."""
    try:
        store.set_goal(category, st.session_state[f"goal_{category}"])
    except InputValidationError as e:
        st.session_state.goal_errors[category] = e.message
    else:
        st.session_state.goal_errors.pop(category, None)


def render_goals_page(store: Store):
    """Render the per-category goals editor."""
    st.title("🎯 Metas por Categoria")
    st.session_state.setdefault("goal_errors", {})

    goals = store.goals
    for category in store.categories:
        col1, col2 = st.columns([1, 2])
        col1.markdown(f"**{category}**")
        key = f"goal_{category}"
        if key not in st.session_state:
            current = goals.get(category)
            st.session_state[key] = "" if current is None else str(current)
        col2.text_input(
            "Meta",
            key=key,
            label_visibility="collapsed",
            placeholder="Meta",
            on_change=_update_goal,
            args=(store, category),
        )
        error = st.session_state.goal_errors.get(category)
        if error:
            col2.error(f"Meta inválida: {error}")

    st.markdown("---")
    st.markdown("### Nova Categoria")
    name = st.text_input("Nome da categoria")
    if st.button("Adicionar categoria") and name:
        if store.add_category(name):
            st.rerun()
        else:
            st.warning("Categoria já existe.")


def render_settings_page(store: Store):
    """Render the settings page."""
    st.title("⚙️ Configurações")

    settings = get_settings()
    st.markdown("### Armazenamento")
    st.markdown(f"**Backend:** {settings.storage.backend}")
    st.markdown(f"**Diretório:** `{settings.storage.directory}`")
    st.markdown(f"**Chave:** `{store.key}`")

    st.markdown("### Status")
    status = validate_all_settings()
    for name in ("storage", "export", "app"):
        if status.get(name, False):
            st.success(f"✅ {name}")
        else:
            st.error(f"❌ {name} - {status.get(f'{name}_error', 'Not configured')}")


if __name__ == "__main__":
    main()
