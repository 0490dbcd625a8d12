import sys
from unittest.mock import Mock, call

import pytest

from tally import Document, render
from tally.elements import component, fragment, h
from tally.hooks import use_callback, use_memo, use_state
from tally.test import TestSession

from counter.components import counter_app


def test_functional_updates_compound():
    @component
    def counter():
        count, set_count = use_state(0)

        def onclick(e):
            set_count(lambda count: count + 1)
            set_count(lambda count: count + 1)

        return h.button(onclick=onclick)(count)

    with TestSession(counter) as session:
        assert session.find('button').click()
        assert session.find('button').has_text('2')


def test_initial_value_factory_is_called_once():
    initial = Mock(return_value=5)

    @component
    def counter():
        count, set_count = use_state(initial)
        return h.button(onclick=lambda e: set_count(count + 1))(count)

    with TestSession(counter) as session:
        assert session.find('button').click()
        assert session.find('button').click()
        assert session.find('button').has_text('7')

    initial.assert_called_once_with()


def test_identical_value_does_not_rerender():
    renders = []

    @component
    def counter():
        count, set_count = use_state(0)
        renders.append(count)
        return h.button(onclick=lambda e: set_count(0))(count)

    with TestSession(counter) as session:
        assert session.find('button').click()
        assert session.find('button').has_text('0')

    assert renders == [0]


def test_more_hooks_than_previous_render():
    @component
    def counter():
        count, set_count = use_state(0)
        if count:
            use_state(None)
        return h.button(onclick=lambda e: set_count(count + 1))(count)

    with TestSession(counter) as session:
        with pytest.raises(
            ValueError,
            match='more refs used than previous render',
        ):
            session.find('button').click().all()


def test_less_hooks_than_previous_render():
    @component
    def counter():
        count, set_count = use_state(0)
        if not count:
            use_state(None)
        return h.button(onclick=lambda e: set_count(count + 1))(count)

    with TestSession(counter) as session:
        with pytest.raises(
            ValueError,
            match='less refs used than previous render',
        ):
            session.find('button').click().all()


def test_use_memo():
    compute = Mock(side_effect=lambda count: count * 10)

    @component
    def counter():
        count, set_count = use_state(0)
        value = use_memo(count // 2)(lambda: compute(count))
        return h.button(onclick=lambda e: set_count(count + 1))(value)

    with TestSession(counter) as session:
        assert session.find('button').has_text('0')
        assert session.find('button').click()
        assert session.find('button').has_text('0')
        assert session.find('button').click()
        assert session.find('button').has_text('20')

    assert compute.call_args_list == [call(0), call(2)]


def test_use_callback():
    callbacks = []

    @component
    def counter():
        count, set_count = use_state(0)

        @use_callback(set_count)
        def increment(e):
            set_count(lambda count: count + 1)

        callbacks.append(increment)
        return h.button(onclick=increment)(count)

    with TestSession(counter) as session:
        assert session.find('button').click()
        assert session.find('button').click()
        assert session.find('button').has_text('2')

    assert len(callbacks) == 3
    assert callbacks[0] is callbacks[1] is callbacks[2]


def test_children_and_props():
    @component
    def card(title, children=()):
        return h.section({'class': 'card'})(h.h3(title), *children)

    page = fragment(
        card(title='First')('one'),
        card(title='Second')(h.em('two'), None, False),
    )

    with TestSession(page) as session:
        assert session.find('.card').has_len(2)
        assert session.find('.card:eq(0)').has_text('Firstone')
        assert session.find('.card:eq(1) > em').has_text('two')
        assert session.find('.card:eq(1)').has_text('Secondtwo')


def test_children_is_not_a_prop():
    with pytest.raises(ValueError):
        h.div(children=())


def test_fragment_cannot_have_props():
    with pytest.raises(ValueError):
        fragment(id='foo')


def test_replaced_component_loses_state():
    @component
    def toggler():
        show, set_show = use_state(True)
        return h.div(
            h.button(onclick=lambda e: set_show(not show))('toggle'),
            counter_app if show else 'hidden',
        )

    with TestSession(toggler) as session:
        assert session.find('button:text("Add 1")').click()
        assert session.find('button:text("Add 1")').click()
        assert session.find('.click_desc span').has_text('2')

        assert session.find('button:text("toggle")').click()
        assert session.find('.counter').not_exists()
        assert session.find('#root').has_text('togglehidden')

        assert session.find('button:text("toggle")').click()
        assert session.find('.click_desc span').has_text('0')


def test_parent_rerender_keeps_child_state():
    @component
    def labelled():
        label, set_label = use_state('a')
        return h.div(
            h.button(onclick=lambda e: set_label(label + 'a'))(label),
            counter_app,
        )

    with TestSession(labelled) as session:
        assert session.find('button:text("Add 1")').click()
        assert session.find('button:text("a")').click()

        assert session.find('button:text("aa")')
        assert session.find('.click_desc span').has_text('1')


def test_dispatch_to_missing_node():
    document = Document(h.html(h.head, h.body(h.div(id='root'))))
    render(counter_app, document.get_element_by_id('root'))
    before = document.result

    assert not document.dispatch([0, 1, 5], 'click')
    assert document.result == before


def test_dispatch_bubbles():
    clicks = []

    @component
    def nested():
        return h.div(onclick=lambda e: clicks.append(('div', e.target.tag)))(
            h.button(onclick=lambda e: clicks.append(('button', e.type)))(
                'click me',
            ),
        )

    with TestSession(nested) as session:
        assert session.find('button').click()

    assert clicks == [('button', 'click'), ('div', 'button')]


def test_update_after_unmount_is_ignored():
    setters = []

    @component
    def counter():
        count, set_count = use_state(0)
        setters.append(set_count)
        return h.span(count)

    document = Document(h.html(h.head, h.body(h.div(id='root'))))
    root = document.get_element_by_id('root')
    render(counter, root)
    document.unmount(root)

    setters[0](1)
    document.flush()

    assert len(setters) == 1


@pytest.mark.skipif(
    not getattr(sys, 'get_int_max_str_digits', lambda: 0)(),
    reason='int to str conversion has no digit limit',
)
def test_int_beyond_digit_limit():
    exponent = sys.get_int_max_str_digits() + 5

    with TestSession(h.p(-3 * 10 ** exponent)) as session:
        assert session.find('p').has_text(f'-3.0e+{exponent}')


def test_parent():
    with TestSession(counter_app) as session:
        span = session.find('span')
        assert span.parent().has_tag('p')
        assert span.parent().has_prop('class', 'click_desc')
        assert span.parent().parent().has_prop('class', 'counter')
        assert session.find('.counter').parent().has_prop('id', 'root')


def test_not_has_text():
    with TestSession(counter_app) as session:
        span = session.find('span')
        assert span.not_has_text('1')

        assert session.find('button:text("Add 1")').click()
        assert span.not_has_text('0')
        with pytest.raises(AssertionError, match='node has text'):
            span.not_has_text('1').get()
