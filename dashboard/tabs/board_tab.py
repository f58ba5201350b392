import streamlit as st

from dashboard.constants import CARD_PRIORITIES
from dashboard.data.kanban import CardSynchronizer, ListSynchronizer
from dashboard.data.synchronizers import ValidationError
from dashboard.state import session_slices


def _lists_for(ctx, board_id):
    lists = session_slices.get_or_create("kanban", f"lists.{board_id}", lambda: ListSynchronizer(ctx.client, ctx.notifier))
    lists.set_scope(board_id)
    return lists


def _cards_for(ctx, list_id):
    cards = session_slices.get_or_create("kanban", f"cards.{list_id}", lambda: CardSynchronizer(ctx.client, ctx.notifier))
    cards.set_scope(list_id)
    return cards


def _create_board(ctx):
    try:
        board = ctx.boards.create(st.session_state.get("board.new_name", ""))
    except ValidationError as exc:
        ctx.notifier.notify("Invalid board", str(exc), variant="destructive")
        return
    if board is not None:
        st.session_state["board.selected"] = board["id"]


def _create_card(cards, list_id, notifier):
    key = f"board.new_card.{list_id}"
    fields = {
        "title": st.session_state.get(key, ""),
        "priority": st.session_state.get(f"board.new_priority.{list_id}", "P2"),
    }
    try:
        created = cards.create(fields)
    except ValidationError as exc:
        notifier.notify("Invalid card", str(exc), variant="destructive")
        return
    if created is not None:
        st.session_state[key] = ""


def render_board_tab(ctx):
    st.markdown("<div class='section-title'>Board</div>", unsafe_allow_html=True)
    boards = {board["id"]: board.get("name") for board in ctx.boards.rows}

    with st.expander("New board"):
        st.text_input("Name", key="board.new_name")
        st.button("Create board", on_click=_create_board, args=(ctx,), key="board.create")

    if not boards:
        st.info("No boards yet.")
        return

    board_id = st.selectbox("Board", list(boards), format_func=boards.get, key="board.selected")
    lists = _lists_for(ctx, board_id).rows
    if not lists:
        st.caption("This board has no lists.")
        return

    columns = st.columns(len(lists))
    for column, board_list in zip(columns, lists):
        list_id = board_list["id"]
        cards = _cards_for(ctx, list_id)
        with column:
            st.markdown(f"**{board_list.get('name')}** · {len(cards)}")
            for card in cards.rows:
                done = card.get("status") == "done"
                title = f"~~{card.get('title')}~~" if done else card.get("title")
                st.checkbox(
                    f"{card.get('priority') or 'P2'} · {title}",
                    value=done,
                    key=f"board.card.{card['id']}",
                    on_change=cards.toggle_complete,
                    args=(card["id"],),
                )
            st.text_input("New card", key=f"board.new_card.{list_id}", label_visibility="collapsed", placeholder="New card")
            st.selectbox("Priority", CARD_PRIORITIES, index=2, key=f"board.new_priority.{list_id}", label_visibility="collapsed")
            st.button("Add", key=f"board.add.{list_id}", on_click=_create_card, args=(cards, list_id, ctx.notifier))
