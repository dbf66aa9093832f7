"""Streamlit interface for the create-user form."""

import asyncio
from typing import List, Optional

import streamlit as st

from profile_form.models.form_models import AvatarFile
from profile_form.services.form_controller import FormController

# Page configuration
st.set_page_config(
    page_title="Criar usuário",
    page_icon="👤",
    layout="centered"
)

# Custom CSS
st.markdown("""
<style>
    .field-error {
        color: #ef4444;
        font-size: 0.875rem;
        margin-top: -0.5rem;
        margin-bottom: 0.5rem;
    }
</style>
""", unsafe_allow_html=True)


SUBMITTING_KEY = "submitting"


def start_submit() -> None:
    """Button callback; runs before the next script run, so that run renders the button disabled."""
    if not st.session_state.get(SUBMITTING_KEY, False):
        st.session_state[SUBMITTING_KEY] = True


def get_controller() -> FormController:
    """Form controller for this browser session."""
    if "form_controller" not in st.session_state:
        st.session_state.form_controller = FormController()
    return st.session_state.form_controller


def show_error(controller: FormController, path: str) -> None:
    """Render the error for a field path, if any."""
    message = controller.error_for(path)
    if message:
        st.markdown(f'<p class="field-error">{message}</p>', unsafe_allow_html=True)


def to_avatar_selection(uploaded) -> List[AvatarFile]:
    """Turn the uploader value into a file selection."""
    if uploaded is None:
        return []
    return [
        AvatarFile(
            name=uploaded.name,
            content=uploaded.getvalue(),
            content_type=uploaded.type or "application/octet-stream"
        )
    ]


def render_techs(controller: FormController) -> None:
    """Technology rows with add and remove controls."""
    label_col, add_col = st.columns([4, 1])
    with label_col:
        st.markdown("**Tecnologias**")
    with add_col:
        if st.button("Adicionar", key="tech-add"):
            controller.add_tech()
    
    removed: Optional[str] = None
    for index, tech in enumerate(controller.techs):
        title_col, knowledge_col, remove_col = st.columns([3, 1, 1])
        
        with title_col:
            title = st.text_input(
                "Título",
                value=tech.title,
                key=f"tech-title-{tech.row_id}",
                label_visibility="collapsed",
                placeholder="Tecnologia"
            )
            controller.register_field(f"techs.{index}.title").set(title)
            show_error(controller, f"techs[{index}].title")
        
        with knowledge_col:
            knowledge = st.number_input(
                "Conhecimento",
                value=tech.knowledge,
                step=1,
                key=f"tech-knowledge-{tech.row_id}",
                label_visibility="collapsed"
            )
            controller.register_field(f"techs.{index}.knowledge").set(knowledge)
            show_error(controller, f"techs[{index}].knowledge")
        
        with remove_col:
            if st.button("Remover", key=f"tech-remove-{tech.row_id}"):
                removed = tech.row_id
    
    if removed is not None:
        controller.remove_tech(controller.index_of(removed))
        st.rerun()
    
    show_error(controller, "techs")


def main():
    """Main Streamlit app."""
    controller = get_controller()
    
    uploaded = st.file_uploader(
        "Avatar",
        type=["png", "jpg", "jpeg", "gif", "webp"],
        key="field-avatar"
    )
    controller.set_value("avatar", to_avatar_selection(uploaded))
    show_error(controller, "avatar")
    
    controller.set_value("name", st.text_input("Nome", key="field-name"))
    show_error(controller, "name")
    
    controller.set_value("email", st.text_input("E-mail", key="field-email"))
    show_error(controller, "email")
    
    controller.set_value("password", st.text_input("Senha", type="password", key="field-password"))
    show_error(controller, "password")
    
    render_techs(controller)
    
    in_flight = st.session_state.get(SUBMITTING_KEY, False)
    st.button(
        "Salvar",
        type="primary",
        use_container_width=True,
        disabled=in_flight or controller.is_busy,
        on_click=start_submit,
        key="submit"
    )
    
    if in_flight:
        try:
            with st.spinner("⏳ Salvando..."):
                asyncio.run(controller.submit())
        finally:
            st.session_state[SUBMITTING_KEY] = False
        # Redraw so the inline errors and the button reflect this attempt
        st.rerun()
    
    if controller.submit_error:
        st.error(f"❌ {controller.submit_error}")
    
    if controller.output:
        st.code(controller.output, language="json")


if __name__ == "__main__":
    main()
