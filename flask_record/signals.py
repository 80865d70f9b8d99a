from blinker import Namespace

_record = Namespace()

before_create = _record.signal('before-create')

after_create = _record.signal('after-create')

before_update = _record.signal('before-update')

after_update = _record.signal('after-update')

before_delete = _record.signal('before-delete')

after_delete = _record.signal('after-delete')

before_add_to_relation = _record.signal('before-add-to-relation')

after_add_to_relation = _record.signal('after-add-to-relation')
