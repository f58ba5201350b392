import streamlit as st


def render_rewards_tab(ctx):
    st.markdown("<div class='section-title'>Rewards</div>", unsafe_allow_html=True)
    st.metric("Available credits", ctx.ledger.total)

    catalog = ctx.rewards.catalog()
    if not catalog:
        st.info("The store is empty.")
        return

    owned = ctx.rewards.owned_item_ids("theme")
    cols = st.columns(3)
    for idx, theme in enumerate(catalog):
        price = int(theme.get("price") or 0)
        with cols[idx % 3]:
            st.markdown(f"**{theme.get('name')}** · {price} credits")
            if theme.get("description"):
                st.caption(theme["description"])
            if theme["id"] in owned:
                st.success("Owned")
                continue
            st.button(
                "Buy",
                key=f"rewards.buy.{theme['id']}",
                on_click=ctx.rewards.purchase,
                args=("theme", theme["id"], price),
                disabled=not ctx.rewards.can_afford(price),
            )

    with st.expander("History"):
        for row in ctx.ledger.rows:
            amount = int(row.get("amount") or 0)
            st.markdown(f"`{row.get('created_at', '')[:10]}` {'+' if amount > 0 else ''}{amount} · {row.get('reason') or '-'}")
