from tally.elements import component, h
from tally.hooks import use_state


@component
def counter_app():
    count, set_count = use_state(0)

    def add_one(e):
        set_count(count + 1)

    def multiply_by_five(e):
        set_count(count * 5)

    def reset(e):
        set_count(0)

    return h.div({'class': 'counter'})(
        h.h3('Tally Counter'),
        h.p({'class': 'click_desc'})(
            'Your click count is ',
            h.span(count),
        ),
        h.div({'class': 'button_container'})(
            h.button(onclick=add_one)('Add 1'),
            h.button(onclick=multiply_by_five)('Multiply by 5'),
            h.button(onclick=reset)('Reset'),
        ),
    )


@component
def static_text():
    return 'hey there'
