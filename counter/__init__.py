from pathlib import Path

from tally import Tally, render
from tally.elements import h

from .components import counter_app, static_text


markup = h.html(
    h.head(
        h.title('Counter'),
        h.link(rel='stylesheet', href='/static/styles.css'),
    ),
    h.body(
        h.div(id='root'),
        h.p(id='dumbParagraph'),
    ),
)


def main(document):
    render(counter_app, document.get_element_by_id('root'))
    render(static_text, document.get_element_by_id('dumbParagraph'))


app = Tally(
    markup,
    main,
    static_path=Path(__file__).parent / 'static',
)
