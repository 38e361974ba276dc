from storefront.clients.catalog.navigator import lists_session_key


def _open_list(client, **params):
    r = client.get("/catalog/list", query_string=params)
    assert r.status_code == 200
    return r


# NAV-001: first product of the list links to the second one only
def test_first_position_has_next_only(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    html = client.get(f"/catalog/detail/{product_ids[0]}", query_string={"d_pos": 0}).text

    assert 'rel="next"' in html
    assert f'href="/catalog/detail/{product_ids[1]}/shirt-2?d_pos=1"' in html
    assert 'rel="prev"' not in html


# NAV-002: product in the middle links both ways
def test_middle_position_has_prev_and_next(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    html = client.get(f"/catalog/detail/{product_ids[2]}", query_string={"d_pos": 2}).text

    assert f'href="/catalog/detail/{product_ids[1]}/shirt-2?d_pos=1"' in html
    assert f'href="/catalog/detail/{product_ids[3]}/shirt-4?d_pos=3"' in html


# NAV-003: last product of the list links back only
def test_last_position_has_prev_only(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    html = client.get(f"/catalog/detail/{product_ids[4]}", query_string={"d_pos": 4}).text

    assert f'href="/catalog/detail/{product_ids[3]}/shirt-4?d_pos=3"' in html
    assert 'rel="next"' not in html


# NAV-004: a single search result gives no links
def test_single_result_has_no_links(client, product_ids):
    _open_list(client, f_search="Shirt 3")

    html = client.get(f"/catalog/detail/{product_ids[2]}", query_string={"d_pos": 0}).text

    assert 'rel="prev"' not in html
    assert 'rel="next"' not in html


# NAV-005: product not part of the sliced list gives no links
def test_product_outside_slice_has_no_links(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    html = client.get(f"/catalog/detail/{product_ids[3]}", query_string={"d_pos": 0}).text

    assert 'rel="prev"' not in html
    assert 'rel="next"' not in html


# NAV-006: without a list position there is nothing to navigate
def test_missing_position_has_no_links(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    html = client.get(f"/catalog/detail/{product_ids[2]}").text

    assert "catalog-stage-navigator" in html
    assert 'rel="prev"' not in html
    assert 'rel="next"' not in html


# NAV-007: cached stage markup gets the links of the current product
def test_cached_stage_renders_current_links(client, product_ids, category_id):
    _open_list(client, f_catid=category_id)

    client.get(f"/catalog/detail/{product_ids[0]}", query_string={"d_pos": 0})
    html = client.get(f"/catalog/detail/{product_ids[2]}", query_string={"d_pos": 2}).text

    assert html.count("<!-- catalog.stage.navigator -->") == 2
    assert f'href="/catalog/detail/{product_ids[1]}/shirt-2?d_pos=1"' in html
    assert f'href="/catalog/detail/{product_ids[3]}/shirt-4?d_pos=3"' in html


# NAV-008: list page remembers its filter and paging parameters
def test_list_stores_params_in_session(client, category_id):
    _open_list(client, f_catid=category_id, l_size=2, d_pos=1)

    with client.session_transaction() as sess:
        assert sess[lists_session_key("default")] == {"f_catid": str(category_id), "l_size": "2"}


def test_list_links_carry_positions(client, product_ids, category_id):
    html = _open_list(client, f_catid=category_id, l_size=2, l_page=2).text

    assert f"/catalog/detail/{product_ids[2]}/shirt-3?d_pos=2" in html
    assert f"/catalog/detail/{product_ids[3]}/shirt-4?d_pos=3" in html
    assert "5 products" in html
