import streamlit as st


PREFIX = "slice"


def _key(slice_name):
    return f"{PREFIX}.{slice_name}"


def get_slice(slice_name):
    key = _key(slice_name)
    if key not in st.session_state:
        st.session_state[key] = {}
    return st.session_state[key]


def get_or_create(slice_name, name, factory):
    payload = get_slice(slice_name)
    if name not in payload:
        payload[name] = factory()
    return payload[name]


def get_value(slice_name, name, default=None):
    return get_slice(slice_name).get(name, default)


def set_value(slice_name, name, value):
    get_slice(slice_name)[name] = value


def clear_slice(slice_name):
    key = _key(slice_name)
    payload = st.session_state.get(key) or {}
    for value in payload.values():
        close = getattr(value, "close", None)
        if callable(close):
            close()
    if key in st.session_state:
        del st.session_state[key]
